# fzterm

Pieces for building an interactive fuzzy finder in the terminal: splitting
input lines into fields, measuring text by display width, colour themes,
decoding key presses from raw terminal input, and drawing windows with plain
ANSI escape sequences.

## Modules

- `fzterm.tokenizer` splits lines into `Token`s, AWK style (a run of
  non-blanks plus the blanks after it), after a literal string or after each
  match of a regular expression, as chosen by a `Delimiter`. `parse_range`
  reads field expressions such as `1`, `2..`, `..-1` and `3..5` into a
  `Range` (raising `ValueError` for bad ones), and `transform` picks and
  merges fields for a list of ranges. `join_tokens` puts tokens back together.
- `fzterm.chars` holds a line of input as a `Chars` object with its item
  `index`, its trimmed length (`trim_length`), leading and trailing
  whitespace counts, line counting (`num_lines`) and splitting and wrapping
  into display lines (`lines`). `to_chars` builds one from UTF-8 bytes or a
  string.
- `fzterm.util` measures text by grapheme cluster (`graphemes`,
  `string_width`, `runes_width`, `truncate`, `repeat_to_fill`), clamps values
  (`constrain`, `as_uint16`, `dur_within`), compares dotted version strings
  (`compare_versions`) and converts CamelCase to kebab-case. `once` and
  `run_once` give functions that answer or run only the first time.
- `fzterm.sync` has `AtomicBool` and `EventBox`, a condition-variable
  mailbox for handing events between threads (`set`, `wait`, `wait_for`,
  `peek`, `watch`, `unwatch`).
- `fzterm.exit_hooks` keeps functions to run once at shutdown, newest first
  (`at_exit`, `run_at_exit_funcs`).
- `fzterm.executor` starts commands through `$SHELL` or a given shell
  (`Executor.exec_command`, `Executor.command`), quotes entries for sh, fish,
  cmd.exe or PowerShell (`Executor.quote_entry`, `escape_arg`), replaces the
  current process with a command (`Executor.become`) and kills a started
  command's process group (`kill_command`).
- `fzterm.tui` is the terminal side:
  - `events`: `EventType`, `Event`, `MouseEvent` and binding key names
    (`Event.key_name`);
  - `attrs`: the `Attr` flags for bold, underline, reverse and so on;
  - `layout`: `BorderShape`, `BorderStyle` via `make_border_style`,
    `WindowType`, `FillReturn`;
  - `theme`: colours, `ColorPair`, `ColorTheme`, the base themes
    `default16`, `dark256`, `light256`, `no_color_theme`, `empty_theme`, and
    `init_theme`, which completes a theme from a base and returns its
    `Palette`; `hex_to_color` turns `#rrggbb` into a 24-bit colour;
  - `keys`: `KeyDecoder`, which turns raw input bytes (arrows, function keys,
    Alt and Ctrl-Alt combinations, SGR mouse reports, bracketed paste) into
    events;
  - `terminal`: opening the controlling terminal, raw mode, sizes and
    single-byte reads;
  - `light`: `LightRenderer` and `LightWindow`, which draw bordered windows
    on the lines below the cursor, or on the alternate screen when
    `fullscreen` is set, and read keys from the terminal.

## Install

    pip install .

## Examples

    from fzterm.tokenizer import Delimiter, join_tokens, parse_range, tokenize, transform

    tokens = tokenize("  abc:  def:  ghi:  jkl", Delimiter())
    ranges = [parse_range(part) for part in "1..2,3".split(",")]
    print(join_tokens(transform(tokens, ranges)))   # "abc:  def:  ghi:  "

    from fzterm.util import compare_versions, string_width

    compare_versions("1.2.3", "1.2.4")   # -1
    string_width("가나다")                # 6

    from fzterm.tui.keys import KeyDecoder

    decoder = KeyDecoder()
    decoder.feed(b"\x1b[A")
    decoder.get_char().key_name()        # "up"

    from fzterm.tui.theme import hex_to_color

    hex_to_color("#102030")

## What it does not do

There is no fuzzy matching or scoring, no reading of an input list, and no
command that runs a finder: the package gives the parts, and a program built
on it supplies the search and the main loop. The only renderer is
`LightRenderer`, which needs a POSIX terminal (`termios`); there is no
renderer for the Windows console.

## Tests

    pip install ".[test]"
    pytest