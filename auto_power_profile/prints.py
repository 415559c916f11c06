from os import get_terminal_size

from auto_power_profile.modules.conditions import PowerConditions

COLOR = True
try: terminal_width = min(get_terminal_size(0)[0], 60)
except OSError: terminal_width = 60

def colored(*values:str, color) -> str:
    return f'\x1b[38;5;{color}m{" ".join(values)}\x1b[0m' if COLOR and color else ' '.join(values)

def print_separator(color=None) -> None: print('\n'+colored('─'*terminal_width, color=color))

def print_header(*values:str, color=None) -> None:
    head = ' '.join(values)
    sep = '─'*max(((terminal_width - len(head)) // 2 - 1), 2)
    print('\n'+colored(f'{sep} {head} {sep}', color=color)+'\n')

def print_colon(previous_value:str, *next_values:object, color=None) -> None: print(colored(previous_value, color=color)+':', *next_values)

def print_error(*values:object) -> None: print_colon('Error', *values, color=9)
def print_info(*values:object) -> None: print_colon('Info', *values, color=12)
def print_warning(*values:object) -> None: print_colon('Warning', *values, color=11)

def yes_no(value:bool) -> str: return 'yes' if value else 'no'

def print_conditions(conditions:PowerConditions) -> None:
    print_header('Power conditions', color=12)
    print_colon('Battery present', yes_no(conditions.has_battery))
    print_colon('Power source', 'battery' if conditions.on_battery else 'AC')
    print_colon('Low battery', yes_no(conditions.low_battery))
    print_colon('Performance apps running', yes_no(conditions.perf_apps))
    print_colon('Recommended profile', colored(conditions.configured_profile, color=10))
