from command_bridge.driver import main

raise SystemExit(main())
