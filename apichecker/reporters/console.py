import sys
from colorama import init as colorama_init, Fore, Style
from datetime import datetime
colorama_init(autoreset=True)

_SEV_COLORS = {"CRITICAL": Fore.MAGENTA, "HIGH": Fore.RED,
               "MEDIUM": Fore.YELLOW, "LOW": Fore.GREEN}

_STATUS_COLORS = {"vulnerable": Fore.RED, "error": Fore.RED,
                  "weak": Fore.YELLOW, "exposed": Fore.YELLOW,
                  "good": Fore.GREEN, "protected": Fore.GREEN,
                  "secure": Fore.GREEN, "excellent": Fore.GREEN}


class Log:
    def __init__(self, verbose: int = 1, stream=None):
        self.verbose = verbose
        # None means whatever sys.stdout is at print time
        self.stream = stream

    def _emit(self, line: str):
        print(line, file=self.stream or sys.stdout)

    def _fmt(self, level: str, color: str):
        stamp = datetime.now().strftime("[%H:%M:%S]")
        return f"{stamp} {color}[{level}]{Style.RESET_ALL}"

    def info(self, msg: str):
        if self.verbose >= 1:
            self._emit(f"{self._fmt('INFO', Fore.CYAN)} {msg}")

    def warn(self, msg: str):
        if self.verbose >= 0:
            self._emit(f"{self._fmt('WARNING', Fore.YELLOW)} {msg}")

    def ok(self, msg: str):
        self._emit(f"{self._fmt('SUCCESS', Fore.GREEN)} {msg}")

    def fail(self, msg: str):
        self._emit(f"{self._fmt('FAIL', Fore.RED)} {msg}")

    def debug(self, msg: str):
        if self.verbose >= 2:
            self._emit(f"{self._fmt('DEBUG', Fore.MAGENTA)} {msg}")

    def finding(self, sev: str, probe: str, description: str, details: str = ""):
        sev_col = _SEV_COLORS.get(sev, Fore.WHITE)
        extra = f" {Style.DIM}({details}){Style.RESET_ALL}" if details else ""
        self._emit(f"{self._fmt(sev, sev_col)} {probe}: {description}{extra}")

    def report(self, report):
        """One summary line per finished report, then its findings and advice."""
        col = _STATUS_COLORS.get(report.status, Fore.WHITE)
        self._emit(f"{self._fmt('REPORT', Fore.CYAN)} {report.test_name} @ {report.target} "
                   f"-> {col}{report.status.upper()}{Style.RESET_ALL} "
                   f"({len(report.findings)} findings, {len(report.details)} requests)")
        if report.error:
            self.fail(report.error)
        for f in report.findings:
            self.finding(f.severity.value, report.test_name, f.description, f.details)
        if self.verbose >= 2:
            for rec in report.recommendations:
                self.debug(f"  * {rec}")
