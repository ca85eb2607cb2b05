"""Entrypoint helper for ``python -m univoucher_mcp.server.main``."""

from univoucher_mcp.server.mcp_server import main

if __name__ == "__main__":  # pragma: no cover - convenience entrypoint
    main()
