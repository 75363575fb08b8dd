from sigilgen.cli import main

raise SystemExit(main())
