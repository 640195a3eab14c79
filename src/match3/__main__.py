from match3.main import main

raise SystemExit(main())
