from ldpwalker.cli import main

main()
