from gitdir.cli import main

main()
