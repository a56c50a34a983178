from pageperf.cli.app import main

main()
