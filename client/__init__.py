"""
TFS client library.

- storage_client: connections to the data plane and sequential file reads
- master_client: HTTP access to the master's namespace API
"""
