import argparse
import logging
import sys

from .driver import Driver
from .errors import Diagnostics


def main(argv=None):
    ap = argparse.ArgumentParser(prog="kscope", add_help=True)
    ap.add_argument("file", nargs="?", default=None, help="Input source file (interactive prompt on stdin when omitted)")
    ap.add_argument("--run-jit", action="store_true", help="Evaluate top-level expressions with the JIT")
    ap.add_argument("--echo", action="store_true", help="Print the IR of every construct as it is read")
    ap.add_argument("--out", default=None, help="Write the final module IR to this path")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    jit = None
    if args.file is None:
        source = sys.stdin
        prompt = "ready> "
        echo = True
        diagnostics = Diagnostics()
    else:
        with open(args.file, 'r') as f:
            source = f.read()
        prompt = None
        echo = args.echo
        diagnostics = Diagnostics(file=args.file)

    if args.run_jit or args.file is None:
        from .jit import JIT
        jit = JIT()

    driver = Driver(source, jit=jit, diagnostics=diagnostics,
                    prompt=prompt, echo=echo)
    driver.run()

    llvm_ir = driver.backend.dump()
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(llvm_ir)
        print(f"[SUCCESS] LLVM IR written to '{args.out}'", file=sys.stderr)
    elif args.file is None or not (args.echo or args.run_jit):
        # Print out all of the generated code.
        print(llvm_ir)

    return 1 if diagnostics.has_errors else 0


if __name__ == "__main__":
    sys.exit(main())
