from dobble.main import main

main()
