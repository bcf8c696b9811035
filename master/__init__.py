"""
Master - the metadata authority

The master is the single source of truth for the TFS namespace.
Responsibilities:
- Inode CRUD (files, folders, symbolic links)
- Path validation and canonical path resolution
- Publishing the address of the cluster data plane
"""
