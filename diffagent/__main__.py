from diffagent.cli import main

main()
