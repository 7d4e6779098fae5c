"""Package entry point for ``python -m escpos_ir``.

WHY: Users without the console script on PATH can still run the tool
as ``python -m escpos_ir print printer-01:9100 --file receipt.txt``.

HOW: Delegates straight to the CLI's main() function.

RULES:
- This file must exist for ``python -m escpos_ir`` to work
"""

from escpos_ir.cli import main

if __name__ == "__main__":
    main()
