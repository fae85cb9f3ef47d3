from prestowatch.cli.app import main

main()
