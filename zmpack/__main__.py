from zmpack.cli import main

raise SystemExit(main())
