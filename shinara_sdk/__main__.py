from shinara_sdk.cli import main

raise SystemExit(main())
