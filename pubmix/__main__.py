from pubmix.cli import main

main()
