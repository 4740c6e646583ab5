"""
hmd package (Home Deploy Tool).

Design goals:
- one linear pipeline per project, run as a single background process
- status.log fully rewritten on every stage transition
- plain git/ssh/scp on the wire, nothing installed but `hmd` on the server
"""

__version__ = "0.1.0"
