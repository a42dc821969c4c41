from ecc_migrate import main

if __name__ == "__main__":
    main()
