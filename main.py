from rich.pretty import pprint

from argcumulus import *


parser = Parser(prog="deploy", help="ship builds to an environment", colorful=True, shell=True)
parser.add_argument("--verbose", "-v", kind="Count", help="raise the verbosity (repeatable)")
parser.add_argument("--env", "-e", choices_i=["dev", "prod"], default="dev", help="target environment")
parser.add_argument("--tag", kind="Array", split=",", help="tags attached to the build")
parser.add_argument("--define", "-D", kind="Pair", help="extra key=value settings")
parser.add_subparsers(title="commands")

push = parser.add_parser("push", aliases=["p"], help="upload build artifacts")
push.add_argument("files", nargs="+", help="artifacts to upload")
push.add_argument("target", help="destination bucket")
push.add_argument("--dry-run", kind="Bool", help="show what would be uploaded")


if __name__ == '__main__':
    pprint(parser.parse_args())
    pprint(parser)
