from provlock.providers.cli import main

raise SystemExit(main())
