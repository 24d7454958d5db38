from sbforge.pipeline import main

main()
