"""
Time control module for the stand-alone surface flow driver
Handles outer time stepping and calendar operations
"""
from datetime import datetime, timedelta


class TimeControl:
    """Outer-step calendar of a surface flow run"""

    def __init__(self, syear, smon, sday, shour, eyear, emon, eday, ehour, dt):
        """
        Initialize time control

        Parameters:
        -----------
        syear, smon, sday, shour : int
            Start year, month, day, hour
        eyear, emon, eday, ehour : int
            End year, month, day, hour
        dt : float
            Outer time step in seconds
        """
        if dt <= 0:
            raise ValueError(f"Time step must be positive, got {dt}")

        self.dt = dt

        self.start_time = datetime(syear, smon, sday, shour)
        self.end_time = datetime(eyear, emon, eday, ehour)
        if self.end_time <= self.start_time:
            raise ValueError(f"End time {self.end_time} is not after start time {self.start_time}")

        self.current_time = self.start_time
        self.kstep = 0

        total_seconds = (self.end_time - self.start_time).total_seconds()
        self.nsteps = int(total_seconds / dt)

    def time_next(self):
        """Advance to next time step"""
        self.kstep += 1
        self.current_time = self.start_time + timedelta(seconds=self.dt * self.kstep)

    def is_output_time(self, ifrq_out):
        """
        Check if current time is output time

        Parameters:
        -----------
        ifrq_out : int
            Output frequency in hours
        """
        if ifrq_out <= 0:
            return False
        return (self.current_time.hour % ifrq_out == 0 and
                self.current_time.minute == 0 and
                self.current_time.second == 0)

    def is_finished(self):
        """Check if simulation is finished"""
        return self.kstep >= self.nsteps

    def get_progress(self):
        """Get simulation progress as percentage"""
        return 100.0 * self.kstep / self.nsteps if self.nsteps > 0 else 0.0

    def __str__(self):
        return f"{self.current_time.strftime('%Y-%m-%d %H:%M:%S')} (step {self.kstep}/{self.nsteps})"
