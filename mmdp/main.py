import sys
from typing import List, Optional

from mmdp.evaluation import MMDPEvaluation
from mmdp.instance import read_instance
from mmdp.matheuristic import matheuristic
from mmdp.options import parse_args
from mmdp.reporting import ConsoleReporter, HistoryReporter, plot_history
from mmdp.util import Timer, make_rng


def main(argv: Optional[List[str]] = None) -> int:
    args, opt = parse_args(argv)

    if args.evaluate or len(args.instance) > 1:
        MMDPEvaluation(args.instance, opt, args.output_csv).evaluate()
        return 0

    inst = read_instance(args.instance[0])
    timer = Timer(opt.time_limit)
    reporter = HistoryReporter(ConsoleReporter(opt.verbose))

    s = matheuristic(inst, opt, rng=make_rng(opt.seed), reporter=reporter, timer=timer)
    print(" ".join(str(v + 1) for v in s.sorted_members()))

    if args.plot:
        plot_history(reporter.history, args.plot, title=args.instance[0])
    return 0


if __name__ == '__main__':
    sys.exit(main())
