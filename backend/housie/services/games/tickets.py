import random
import uuid

ROWS = 3
COLUMNS = 9
NUMBERS_PER_ROW = 5
# Uniqueness retries per cell before a repeated number is accepted
MAX_ATTEMPTS = 100

# Inclusive number range for each column: 1-9, 10-19, ..., 80-90
COLUMN_RANGES = [(1, 9)] + [(c * 10, c * 10 + 9) for c in range(1, 8)] + [(80, 90)]


def generate_ticket(rng=random):
    """Build one 3x9 ticket.

    Every row holds exactly five numbers drawn from the column's range. Numbers
    are kept distinct within the ticket on a best-effort basis (bounded retries),
    and each column reads ascending top to bottom. Columns may end up empty.
    """
    ticket = [[None] * COLUMNS for _ in range(ROWS)]
    used = set()

    for r in range(ROWS):
        for c in sorted(rng.sample(range(COLUMNS), NUMBERS_PER_ROW)):
            low, high = COLUMN_RANGES[c]
            num = rng.randint(low, high)
            attempts = 0
            while num in used and attempts < MAX_ATTEMPTS:
                num = rng.randint(low, high)
                attempts += 1
            used.add(num)
            ticket[r][c] = {
                'number': num,
                'marked': False,
                'id': f"cell-{r}-{c}-{uuid.uuid4().hex[:12]}",
            }

    for c in range(COLUMNS):
        cells = [ticket[r][c] for r in range(ROWS) if ticket[r][c] is not None]
        for cell, num in zip(cells, sorted(cell['number'] for cell in cells)):
            cell['number'] = num

    return ticket


def generate_ticket_data(count=1, rng=random):
    return [generate_ticket(rng) for _ in range(count)]


def cell_at(ticket_data, ticket_index, row_index, col_index):
    """Return the addressed cell, or None when the address is out of range or empty."""
    if not isinstance(ticket_data, list):
        return None
    if not 0 <= ticket_index < len(ticket_data):
        return None
    ticket = ticket_data[ticket_index]
    if not 0 <= row_index < len(ticket):
        return None
    row = ticket[row_index]
    if not 0 <= col_index < len(row):
        return None
    return row[col_index]
