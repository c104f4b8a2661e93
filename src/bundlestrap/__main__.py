from bundlestrap import cli

raise SystemExit(cli.main())
