from bootstrapper.main import main

main()
