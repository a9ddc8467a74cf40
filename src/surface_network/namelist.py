"""
Namelist parser for Fortran-style namelist files

Sections look like

    &SURFACE_FLOW
      pondmin = 1.e-4
      ltrace  = .true.
      trace_hrus = 3, 7, 12
    /
"""
import re
import os


class Namelist:
    """Parse and store Fortran-style namelist data"""

    def __init__(self, namelist_file=None, data=None):
        """
        Initialize and parse namelist file

        Parameters:
        -----------
        namelist_file : str, optional
            Path to namelist file
        data : dict, optional
            Pre-parsed {section: {key: value}} contents, used when no file is given
        """
        self.data = {}
        self.namelist_file = namelist_file
        if namelist_file is not None:
            self._parse()
        if data:
            for section, params in data.items():
                self.data.setdefault(section, {}).update(params)

    def _parse(self):
        """Parse namelist file"""
        if not os.path.exists(self.namelist_file):
            raise FileNotFoundError(f"Namelist file not found: {self.namelist_file}")

        with open(self.namelist_file, 'r') as f:
            lines = f.readlines()

        # Remove comments and join lines
        clean_lines = []
        for line in lines:
            if '!' in line:
                line = line[:line.index('!')]
            line = line.strip()
            if line:
                clean_lines.append(line)

        content = '\n'.join(clean_lines)

        # Namelists run from &NAME to a line holding only /
        pattern = r'&(\w+)(.*?)(?:^/|\n/)'
        matches = re.findall(pattern, content, re.DOTALL | re.MULTILINE)

        for name, body in matches:
            self.data[name] = {}

            for line in body.strip().split('\n'):
                line = line.strip()
                if not line or '=' not in line:
                    continue

                key, value = line.split('=', 1)
                self.data[name][key.strip()] = self._parse_value(value)

    def _parse_value(self, value):
        """Parse value and convert to appropriate Python type"""
        value = value.strip().rstrip(',').strip()

        # String (single or double quotes)
        if len(value) >= 2 and ((value.startswith("'") and value.endswith("'")) or
                                (value.startswith('"') and value.endswith('"'))):
            return value[1:-1]

        # Comma-separated list
        if ',' in value:
            return [self._parse_value(item) for item in value.split(',') if item.strip()]

        # Boolean
        if value.lower() in ['.true.', 't']:
            return True
        if value.lower() in ['.false.', 'f']:
            return False

        # Try integer
        try:
            return int(value)
        except ValueError:
            pass

        # Try float (Fortran double exponent 1.d-4 included)
        try:
            return float(value.replace('d', 'e').replace('D', 'e'))
        except ValueError:
            pass

        return value

    def get(self, section, key, default=None):
        """Get value from namelist"""
        try:
            return self.data[section][key]
        except KeyError:
            return default

    def get_section(self, section):
        """Get entire section as dictionary"""
        return self.data.get(section, {})

    def __repr__(self):
        """String representation"""
        lines = ["Namelist contents:"]
        for section, params in self.data.items():
            lines.append(f"\n&{section}")
            for key, value in params.items():
                lines.append(f"  {key} = {value}")
            lines.append("/")
        return '\n'.join(lines)
