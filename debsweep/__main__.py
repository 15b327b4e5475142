from debsweep.cli import main

main()
