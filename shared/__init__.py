"""
Shared utilities for TFS components.

This package contains common functionality used across master, worker, client and web:
- uri: namespace path rules (validation, canonical form, basename)
- types: wire types exchanged between components (ClientFileInfo, NetAddress, ReadType)
- exceptions: the TFS error hierarchy
- socket_protocol: newline-delimited JSON frames plus raw byte payloads over TCP
- config: environment-driven ports, paths and buffer sizes
"""
