#!/usr/bin/env python3

from cgiprogram.program import main

if __name__ == "__main__":
    main()
