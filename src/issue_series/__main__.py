from issue_series.orchestrator.main import main

raise SystemExit(main())
