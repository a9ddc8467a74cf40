"""
Runtime debugging trace module
Records the sub-step history of selected HRUs during routing
"""
import numpy as np


class HruTracer:
    """HRU tracer"""

    def __init__(self, hru_list=None):
        """
        Initialize tracer

        Parameters:
        -----------
        hru_list : list of int
            Worker-wide indices of HRUs to trace
        """
        self.enabled = hru_list is not None and len(hru_list) > 0
        self.hrus = set(int(i) for i in hru_list) if self.enabled else set()
        self.trace_data = []
        self.timestep = 0
        self.substep = 0

    def set_timestep(self, timestep, substep=0):
        """Set current call and sub-step number"""
        self.timestep = timestep
        self.substep = substep

    def select(self, basin):
        """
        Basin-local indices of traced HRUs in one basin

        Returns:
        --------
        list of (int, int)
            (basin-local index, worker-wide index) pairs
        """
        if not self.enabled:
            return []
        return [(i, int(ihru)) for i, ihru in enumerate(basin.ihru) if int(ihru) in self.hrus]

    def trace(self, ihru, stage, **kwargs):
        """
        Record state of an HRU

        Parameters:
        -----------
        ihru : int
            Worker-wide HRU index
        stage : str
            Computation stage identifier
        **kwargs : dict
            Variables to record
        """
        if not self.enabled or ihru not in self.hrus:
            return

        record = {
            'timestep': self.timestep,
            'substep': self.substep,
            'ihru': ihru,
            'stage': stage,
        }
        record.update(kwargs)
        self.trace_data.append(record)

    def _by_hru(self):
        by_hru = {}
        for record in self.trace_data:
            by_hru.setdefault(record['ihru'], []).append(record)
        return by_hru

    def save_to_file(self, filename):
        """Save trace data to a text file"""
        if not self.trace_data:
            return

        with open(filename, 'w') as f:
            f.write("=" * 100 + "\n")
            f.write("Hillslope Surface Flow - Sub-step Trace\n")
            f.write("=" * 100 + "\n")

            by_hru = self._by_hru()
            for ihru in sorted(by_hru.keys()):
                f.write(f"\n\n{'=' * 100}\n")
                f.write(f"Complete trace for HRU {ihru}\n")
                f.write(f"{'=' * 100}\n")

                for record in by_hru[ihru]:
                    f.write(f"\nTimestep={record['timestep']}, Substep={record['substep']}, "
                            f"Stage={record['stage']}\n")
                    f.write("-" * 80 + "\n")

                    for key in sorted(record.keys()):
                        if key in ('timestep', 'substep', 'ihru', 'stage'):
                            continue
                        value = record[key]
                        if isinstance(value, (bool, np.bool_)):
                            f.write(f"  {key:<25s}: {str(value):>20s}\n")
                        elif isinstance(value, (int, np.integer)):
                            f.write(f"  {key:<25s}: {value:20d}\n")
                        elif isinstance(value, (float, np.floating)):
                            f.write(f"  {key:<25s}: {value:25.15e}\n")
                        else:
                            f.write(f"  {key:<25s}: {str(value)}\n")

        print(f"Trace data saved to: {filename}")
        print(f"  Total records: {len(self.trace_data)}")
        print(f"  Traced HRUs: {sorted(self.hrus)}")

    def print_summary(self):
        """Print trace data summary"""
        if not self.trace_data:
            print("No trace data")
            return

        print("\nTrace data summary:")
        for ihru, records in sorted(self._by_hru().items()):
            stages = {}
            for record in records:
                stages[record['stage']] = stages.get(record['stage'], 0) + 1

            print(f"  HRU {ihru}: {len(records)} records")
            for stage, count in sorted(stages.items()):
                print(f"    {stage}: {count}")
