from deployconf.main import main

main()
