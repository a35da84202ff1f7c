from fieldgate.cli.main import main

raise SystemExit(main())
