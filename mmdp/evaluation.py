# File: evaluation.py

from __future__ import annotations

import csv
import os
import time
import traceback
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from mmdp.instance import read_instance
from mmdp.matheuristic import matheuristic
from mmdp.options import Options
from mmdp.reporting import ConsoleReporter, Reporter
from mmdp.util import make_rng

__all__ = ['MMDPEvaluation']


class MMDPEvaluation:
    """
    Evaluator for the Max-Mean Dispersion Problem.
    Runs the matheuristic on a list of instance files, one after the other, and writes the
    results to a CSV file.
    """

    def __init__(self,
                 instance_paths: List[str],
                 options: Optional[Options] = None,
                 output_csv_path: str = 'mmdp_results.csv'):
        """
        Args:
            instance_paths (List[str]): Instance files to evaluate.
            options (Options): Run configuration shared by every instance.
            output_csv_path (str): Path to write the final results CSV file.
        """
        missing = [p for p in instance_paths if not os.path.exists(p)]
        if missing:
            raise FileNotFoundError(f"Instance files not found: {missing}")

        self.instance_paths = instance_paths
        self.options = options if options is not None else Options()
        self.output_csv_path = output_csv_path

        print(f"Loaded {len(self.instance_paths)} MMDP instances.")

    def _run_single_solve(self, path: str) -> Dict[str, Any]:
        """Runs the solver on one instance; failures are recorded, not raised."""
        instance_name = os.path.basename(path)
        row = {'instance_name': instance_name}
        try:
            inst = read_instance(path)
            reporter = ConsoleReporter(self.options.verbose) if self.options.verbose > 0 else Reporter()
            solve_start_time = time.time()
            s = matheuristic(inst, self.options, rng=make_rng(self.options.seed), reporter=reporter)
            solve_time = time.time() - solve_start_time

            row.update(n=inst.n, size=s.size, objective=s.objective(), time=solve_time)
            print(f"instance_name={instance_name}, obj={s.objective():.4f}, size={s.size}, "
                  f"solve_time={solve_time:.2f}")
        except Exception as e:
            print(f"Runtime error on {instance_name}: {e}")
            traceback.print_exc()
            row.update(n='N/A', size='N/A', objective='runtime_error', time=0)
        return row

    def evaluate(self) -> List[Dict[str, Any]]:
        """Evaluates every instance and writes the CSV."""
        start_time = time.time()

        results = []
        for path in tqdm(self.instance_paths, desc="Evaluating instances"):
            results.append(self._run_single_solve(path))

        self.write_results_to_csv(results)

        total_time = time.time() - start_time
        print(f"\nEvaluation finished in {total_time:.2f} seconds.")
        return results

    def write_results_to_csv(self, results_data: List[Dict[str, Any]]):
        """Writes the evaluation results to a CSV file."""
        if not results_data:
            print("No results to write.")
            return

        headers = ['instance_name', 'n', 'size', 'objective', 'time']
        with open(self.output_csv_path, 'w', newline='') as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=headers, restval='N/A')
            writer.writeheader()
            writer.writerows(results_data)
        print(f"Successfully wrote results to '{self.output_csv_path}'")
