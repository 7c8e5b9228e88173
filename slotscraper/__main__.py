from slotscraper.cli import main

raise SystemExit(main())
