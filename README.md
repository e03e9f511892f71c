# idz

`idz` reads and writes *Identity Disks*. An Identity Disk is one SQLite file
holding:

- text chunks, each with a UUID `chunk_id`
- JSON metadata for each chunk
- a 32-bit float vector embedding for each chunk, stored under a model signature

When a disk is opened, the embeddings stored for one model signature are loaded
into an in-memory cosine-distance index (`idz.index.CosineIndex`), so the disk
can be searched by vector. The package uses only the standard library.

## Command line

The `idz-cli` command has two subcommands. It exits with status 1 and prints
`Error: ...` when the disk or a file cannot be read or written.

### create

```
idz-cli create --output notes.idz a.txt b.txt
idz-cli create -o notes.idz -m "my-model-384_fp32" a.txt
```

Any existing file at the output path is replaced. Every non-blank line of each
input file (read as UTF-8) becomes one chunk, with metadata
`{"source_file": ..., "chunk_index": ..., "char_count": ...}`, where
`char_count` is the line's length in UTF-8 bytes.

The embeddings written by `create` are placeholders from a fixed-seed
generator (`idz.signature.DemoRandom`), not real model output. Their dimension
is the number after the last `-` in the part of the signature before the first
`_` (`parse_dimension`); when no number can be read there, it is 1536. The
default signature is `openai/text-embedding-ada-002_fp32`. A signature that has
a `_` but does not contain `fp32` gets a warning on standard error.

Note: a newly created disk has no search index loaded (see *Behaviour* below),
so for every line `create` prints `Failed to add chunk ...: Invalid data: No
supported index loaded.` on standard error. The chunk and its embedding have
still been written, and they are there when the disk is opened again.

### explore

```
idz-cli explore notes.idz --model-signature "my-model-384_fp32"
```

Opens the disk with the given signature and shows a curses screen with four
views: Overview (spec version, chunk count, average chunk size, parsed
dimension and data type, active index type), Chunk list, Chunk detail (text
and pretty-printed metadata) and Search.

| Key | Action |
| --- | --- |
| `q` | Quit (at any time, also while typing a search) |
| `1` / `2` / `3` | Overview / Chunk list / Search |
| `j` / `k` or arrows | Move the selection, wrapping at the ends |
| `Enter` | Open the selected chunk, or run the search being typed |
| `/` | Start typing a search (in the Search view) |
| `Esc` | Back from the chunk view to the list, or cancel typing a search |
| `Backspace` | Delete the last character of the search being typed |

The search does not embed the typed text: it searches with a placeholder
vector of the parsed dimension and returns up to 10 chunks. The text only
has to be non-empty. The explorer needs Python's `curses` module.

## Library

```python
from idz.disk import IdentityDisk
from idz.errors import InvalidDataError

with IdentityDisk.create("notes.idz", "my-model-3_fp32") as disk:
    try:
        disk.add_chunk("hello world", [0.1, 0.2, 0.3], {"source": "demo"})
    except InvalidDataError:
        pass  # stored, but a new disk has no index loaded yet

with IdentityDisk.open("notes.idz", "my-model-3_fp32") as disk:
    print(disk.get_spec_version())            # "1.0"
    chunk_id = disk.add_chunk("second", [0.3, 0.2, 0.1])   # indexed now
    disk.update_chunk_metadata(chunk_id, {"reviewed": True})
    for chunk in disk.get_chunks():
        print(chunk.chunk_id, chunk.content, chunk.metadata)
    for result in disk.search([0.1, 0.2, 0.25], 5):
        print(result.distance, result.chunk.content)
    print(disk.get_index_type_description())  # "F32 (Cosine Distance)"
```

Modules:

- `idz.disk` – `IdentityDisk` with `create`, `open`, `open_in_memory`,
  `add_chunk`, `get_chunks`, `search`, `update_chunk_metadata`,
  `get_spec_version`, `get_index_type_description`, `close`; usable as a
  context manager.
- `idz.models` – `Chunk` and `SearchResult` dataclasses, each with `to_dict()`.
- `idz.index` – `CosineIndex`, `cosine_distance`, `encode_f32`, `decode_f32`,
  `is_f32_signature`.
- `idz.signature` – `parse_dimension`, `parse_dtype`, `DemoRandom`.
- `idz.app` – `App` and `AppView`, the explorer's state and key handling,
  independent of the screen.
- `idz.tui` and `idz.cli` – the curses screen and the `idz-cli` command.

## Behaviour

- `IdentityDisk.create` replaces any existing file at the given path.
- `IdentityDisk.open_in_memory` copies the file into an in-memory database;
  later changes are not written back to the file.
- Only 32-bit float embeddings are supported. A signature selects them when it
  ends in `_fp32` or contains no `_` at all.
- An index is built on opening only when embeddings for the signature already
  exist. Without one, `search` returns an empty list, and `add_chunk` writes
  the chunk and embedding and then raises `InvalidDataError("No supported
  index loaded.")`.
- `add_chunk` refuses, before writing anything, a signature that contains no
  `_`, raising `InvalidDataError("Mismatched vector type: expected fp32")`.
- Metadata defaults to `{}`; stored metadata that is not valid JSON is read
  back as `{}`.
- Search results are ordered from nearest to farthest by cosine distance
  (one minus cosine similarity, never below 0; 0 when either vector is zero).

Errors are subclasses of `idz.errors.DiskError`:

- `InvalidDataError` – data that does not fit the disk or index.
- `NotFoundError` – `update_chunk_metadata` on a missing chunk.
- `StorageError` – SQLite or file-system failures.

## Not included

The package does not compute embeddings from text: neither `create` nor the
explorer's search calls an embedding model, both use placeholder vectors.
Embeddings other than 32-bit floats cannot be indexed or searched, and the
spec version is not checked when a disk is opened.