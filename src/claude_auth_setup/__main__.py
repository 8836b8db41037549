from claude_auth_setup.cli import main

if __name__ == "__main__":
    main()
