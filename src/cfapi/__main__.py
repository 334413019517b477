"""
python -m cfapi auth     — password login against UAA, print tokens
python -m cfapi <verb>   — API operations (get, put, post, delete)
"""

import sys


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: cfapi <auth|get|put|post|delete> ...", file=sys.stderr)
        sys.exit(1)

    if sys.argv[1] == "auth":
        sys.argv = [sys.argv[0], *sys.argv[2:]]
        from .uaa import main as auth_main

        auth_main()
    else:
        from .client import main as client_main

        client_main()


if __name__ == "__main__":
    main()
