"""
CLI entry point for the CC Wrapper auth API
"""

if __name__ == "__main__":
    from . import main

    main()
