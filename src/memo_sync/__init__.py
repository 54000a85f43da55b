"""memo-sync.

Keeps a single memo (text plus input-limit settings) consistent between a
local SQLite replica and a private GitHub Gist, using revision-counted
last-writer-wins reconciliation.
"""

__version__ = "1.0.0"
__author__ = "Anton"
__email__ = ""
