"""
LLM Whiteboard - sync AI coding CLI sessions and resume them on any machine.

Components:
- Adapters: Claude Code and Gemini CLI hook schemas, settings and transcript layouts
- Hooks: Non-destructive installation of sync hooks into each tool's settings
- Crypto: Checksums and AES-256-GCM encryption for transcript transfer
- Restore: Rebuild a downloaded transcript where the CLI tool expects it
- Rotation: Re-encrypt remote transcripts under a fresh key
"""

__version__ = "0.1.0"
