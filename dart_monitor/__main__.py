from dart_monitor.bot import main

main()
