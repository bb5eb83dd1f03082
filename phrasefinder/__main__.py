from phrasefinder.main import main

raise SystemExit(main())
