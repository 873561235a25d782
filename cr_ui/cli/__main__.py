from cr_ui.cli.main import main

main()
