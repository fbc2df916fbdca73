from coffee_api.startup import main

main()
