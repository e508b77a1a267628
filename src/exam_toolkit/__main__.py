from exam_toolkit.cli import main

raise SystemExit(main())
