"""Allow running askterm as a module: python -m askterm"""

from askterm.cli import main

if __name__ == "__main__":
    main()
