from reconnbench.cli import main

raise SystemExit(main())
