from rtfcodec.cli import main

raise SystemExit(main())
