"""
TFS web UI: file download gateway and browse page.
"""
