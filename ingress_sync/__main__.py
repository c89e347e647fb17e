"""ingress-sync command line entry point."""

from ingress_sync.tool.ingress_sync import main

if __name__ == "__main__":
    main()
