from attribution_engine.app_shell.cli import main

main()
