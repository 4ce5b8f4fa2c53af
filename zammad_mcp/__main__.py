from zammad_mcp.server import main

main()
