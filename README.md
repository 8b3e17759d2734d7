# lodestar

Building blocks for the search side of a UCI chess engine, as a plain Python
library with no third-party dependencies. It covers what sits around move
generation and evaluation: the transposition table, per-thread search state,
time management, the numeric rules of pruning and reductions, the
iteration-level bookkeeping of a search, UCI parsing and reporting, and a
gradient-descent tuner for linear evaluation terms.

## Modules

- **`lodestar.types`** – piece encoding and score limits (`MATE`,
  `MATE_IN_MAX`, `TBWIN`, `TBWIN_IN_MAX`, `VALUE_NONE`, `MAX_PLY`,
  `MAX_MOVES`), with `piece_type`, `piece_colour` and `make_piece`, which
  raise `ValueError` for invalid encodings.
- **`lodestar.transposition`** – `TranspositionTable`, three entries per
  bucket, with `resize`, `clear`, `new_search` (generation ageing), `probe`
  (returns a `ProbeResult` or `None`), `store` (depth- and age-based
  replacement) and `hashfull` (permill estimate). `value_to_tt` and
  `value_from_tt` adjust mate and tablebase scores by height. `Bound` holds
  `NONE`, `LOWER`, `UPPER` and `EXACT`. `PawnKingTable` caches `PKEntry`
  records by pawn-king hash.
- **`lodestar.thread`** – `PVariation` (a line of moves and a score),
  `SearchThread` (results, node counters, killer and history tables) and
  `ThreadPool`, which prepares threads for a search with `new_search` and
  sums `nodes()` and `tbhits()`. It also holds the search's tuning constants
  such as `WINDOW_SIZE`, `BETA_MARGIN` and `SEE_PIECE_VALUES`.
- **`lodestar.timeman`** – `Limits` for a search and `TimeManager`, which
  allocates ideal and maximum time from the clock, increment and moves to go,
  tracks best-move stability with `update`, and answers `finished` and
  `stop_early`. `get_real_time` gives wall-clock milliseconds.
- **`lodestar.pruning`** – `lmr_reduction`, `late_move_pruning_count`,
  `null_move_reduction`, `quiet_reduction`, `noisy_reduction`,
  `clamp_reduction`, `singular_extension`, `see_margins`, `draw_score`,
  `mate_distance_bounds` and `tablebase_score` (with the `Wdl` outcomes).
- **`lodestar.search`** – `aspiration_window`, which widens a window around
  the previous score until a caller-supplied search lands inside it;
  `update_best_line`, `revert_best_line`, `sort_multipv_lines` and
  `select_best_thread`.
- **`lodestar.uci`** – `parse_go` (returns a `GoCommand` with `Limits` and
  the ponder flag), `parse_position`, `UciOptions.apply` for `setoption`
  commands, `SearchReport.render` for `info` lines, `uci_score`,
  `format_current_move`, `uci_banner` and `read_commands`.
- **`lodestar.tuner`** – `sigmoid`, `parse_result`, `build_tuples`,
  `linear_evaluation`, `update_single_gradient`, `compute_gradient`,
  `adagrad_step`, `static_evaluation_errors`, `tuned_evaluation_errors`,
  `compute_optimal_k`, and `format_term_0` to `format_term_3` for printing
  tuned terms as score declarations.

## Examples

Storing and probing the transposition table:

```python
from lodestar.transposition import Bound, TranspositionTable

table = TranspositionTable(16)
table.new_search()
key = 0x9D39247E33776D41
table.store(key, 0, 0x0C1C, 35, 20, 8, Bound.EXACT)
hit = table.probe(key, 0)
assert hit is not None and hit.value == 35 and hit.bound == Bound.EXACT
```

One aspiration-window iteration around your own search function:

```python
from lodestar.search import aspiration_window
from lodestar.thread import PVariation, ThreadPool
from lodestar.timeman import Limits, TimeManager

limits = Limits(depth_limit=1, limited_by_depth=True)
pool = ThreadPool(1)
pool.new_search(limits, TimeManager(limits))
thread = pool[0]
thread.depth = 1

def search(thread, alpha, beta, depth):
    return PVariation(line=[0x0C1C], score=25)

pv = aspiration_window(thread, search)
assert thread.completed == 1 and thread.pvs[1].score == 25
```

Reading UCI input and answering it:

```python
import sys
from lodestar.uci import UciOptions, parse_position, read_commands

options = UciOptions()
for command in read_commands(sys.stdin):
    if command.startswith("position"):
        fen, moves = parse_position(command)
    elif command.startswith("setoption"):
        for line in options.apply(command):
            print(line)
```

Turning an internal score into what a GUI expects:

```python
from lodestar.uci import uci_score

uci_score(186, True)   # ("cp", 100)
```

## What it does not do

lodestar has no board representation, move generator, evaluation function
or tablebase prober, and so no complete alpha-beta search: `aspiration_window`
calls a search function that you supply. It has no Zobrist key generation;
hash keys come from your own board code. There is no engine executable or
UCI main loop: the `uci` module parses commands and formats replies, but
wiring them to a board and a search is left to the program that uses it. The
tuner works on entries you build; it does not read training files itself.

## Requirements

Python 3.10 or newer. The test suite uses pytest, available through the
`test` extra.