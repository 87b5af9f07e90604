# tidalrunner

Bring up a TidalCycles live-coding rig from one command: the Haskell
toolchain (ghcup, GHC, cabal and the `tidal` library), SuperCollider with
SuperDirt, sc3-plugins and TidalLooper. A small OSC server then forwards
Tidal code to a running GHCi session.

## Installing

```
pip install tidalrunner
```

The tools `ghcup`, `cabal`, `ghci`, `sclang`, `scsynth` and `gh` are looked
for on `PATH` and in their usual Windows install locations (`C:\ghcup\bin`,
`SuperCollider-<version>` folders under Program Files, the GitHub CLI
folder). Where ghcup, cabal, SuperCollider or `gh` is missing, an install is
attempted through PowerShell (`winget`, or the elevated ghcup bootstrap
script). `git` must be available for TidalLooper and the extra sample sets.

## Running the rig

```
tidalrunner            # install what is missing, start SuperCollider and Tidal
tidalrunner --force    # kill a GHCi/Tidal session that is already running first
tidalrunner -f         # same as --force
tidalrunner --spawn    # start the rig as a detached background process and return
```

What `tidalrunner` does, in order:

1. Looks for running GHCi processes. On Windows only those whose command
   line mentions port 57120 or `BootTidal.hs` count. If one is found it
   exits with status 100, unless `-f`/`--force` is given, in which case the
   processes are killed.
2. Exits with status 100 if UDP port 57126 on 127.0.0.1 is already taken.
3. With `--spawn`, relaunches itself in the background and exits.
4. Runs `ghcup install ghc`, `ghcup install cabal`, `ghcup set ghc`,
   `ghcup set cabal`, `cabal update`, and installs `tidal` with
   `cabal v1-install` if `cabal list --installed tidal` does not show it.
5. Finds (or installs) SuperCollider and puts its directory at the front of
   `PATH`.
6. Installs sc3-plugins into `~/AppData/Local/SuperCollider/Extensions/sc3-plugins`
   if that directory is missing or empty, and clones TidalLooper into
   `~/AppData/Local/SuperCollider/Extensions/tidal-looper`.
7. On Windows, kills whatever holds UDP port 57120 until it is free.
8. Writes `startup.scd` and `BootTidal.hs` into the current directory
   (both are removed again on exit), starts `sclang startup.scd` and GHCi
   with the boot script, and prefixes their output with
   `[SuperCollider stdout]`, `[Tidal stdout]` and so on.

Once started:

* SuperDirt listens on UDP port **57120**. It also accepts `/eval <string>`
  messages and interprets the string as SuperCollider code.
* The Tidal bridge listens on UDP port **57126**. The first string argument
  of every `/tidal` message is written to the GHCi session as one line.

Press Ctrl+C to stop; the SuperCollider process is killed and the input to
the GHCi session is closed.

## Talking to Tidal

```
tidalrunner-shell [--host HOST] [--port PORT]
```

An interactive prompt. A sample pattern is sent to `d1` first; then each
non-empty line you type is sent unchanged as `/tidal` to the bridge
(127.0.0.1:57126 by default), for example `d1 $ s "bd sn"` or `hush`. Type
`quit` or end the input to leave.

```
tidalrunner-patterns [--host HOST] [--port PORT] [--delay SECONDS]
```

Plays through a tour of Dirt-Samples banks, one `/tidal` pattern every two
seconds by default, ending with `hush`.

```
tidalrunner-ghci
```

Starts a plain GHCi with the `tidal` package, boots Tidal against SuperDirt
on 127.0.0.1:57120, plays a few patterns and then waits for GHCi to exit or
for Ctrl+C.

## Talking to SuperDirt and SuperCollider directly

All of these take `--host` and `--port` (default 127.0.0.1:57120).

```
tidalrunner-dirt-play [--count N] [--delay SECONDS]   # alternate "bd" and "sn" on /dirt/play, every 0.5 s by default
tidalrunner-samples [--dir PATH] [--delay SECONDS]    # trigger samples from local Dirt-Samples banks
tidalrunner-osc-eval                                  # send SuperCollider code through /eval
tidalrunner-sc3plugins-eval                           # SuperPiano and PitchShift sc3-plugins demos
```

`tidalrunner-dirt-play` runs until interrupted unless `--count` is given.
`tidalrunner-samples` uses the user's Dirt-Samples directory unless `--dir`
is given, and asks whether to play only the first sample of each bank (`1`)
or every sample (`2` or `all`).

## Extra sample sets

`tidalrunner-dirt-dl` installs and removes the uxn-st sample folders
(`11_st*`, `22_st*`) in Dirt-Samples and the AKWF single-cycle waveforms
(`akwf_*`) in `downloaded-quarks/akwf`. Each set is shallow-cloned from the
`dirt` branch of a git repository; set the repository locations with the
`TCRS_UXN_ST_URL` and `TCRS_UXN_AKWF_URL` environment variables.

```
tidalrunner-dirt-dl install          # 22_st* and all akwf_*
tidalrunner-dirt-dl install-st       # 22_st* only (also: install-st-22)
tidalrunner-dirt-dl install-st-11    # 11_st* only
tidalrunner-dirt-dl install-st-all   # 11_st* and 22_st*
tidalrunner-dirt-dl install-akwf     # akwf_* only
tidalrunner-dirt-dl remove           # 11_st*, 22_st* and the akwf folder
tidalrunner-dirt-dl remove-st        # 11_st* and 22_st*
tidalrunner-dirt-dl remove-st-22
tidalrunner-dirt-dl remove-st-11
tidalrunner-dirt-dl remove-akwf
tidalrunner-dirt-dl status           # show what is installed
```

Use `--dest-samples <path>` (or `--dest <path>`) and `--dest-akwf <path>`
to choose other target directories. Entries that already exist are left
alone.

Likewise, the TidalLooper repository cloned by `tidalrunner` is taken from
the `TIDAL_LOOPER_URL` environment variable.

## Using it as a library

```python
from tidalrunner.dirt import DirtSampleMap, default_dirt_samples_dir
from tidalrunner.osc import encode_message, decode_message

root = default_dirt_samples_dir()
if root is not None:
    samples = DirtSampleMap.from_dir(root)
    print(samples.index_of("bd", "BT0A0A7.wav"))
    print(samples.filename_of("bd", 0))

packet = encode_message("/tidal", ['d1 $ s "bd sn"'])
message = decode_message(packet)
print(message.address, message.args)
```

* `tidalrunner.osc` encodes and decodes single OSC messages (int, float,
  string, blob and boolean arguments; `h` and `d` are also decoded). OSC
  bundles are not supported and raise `OscError`.
* `tidalrunner.find` locates the tools without installing anything;
  `tidalrunner.install` does the same but tries to install what is missing.
* `tidalrunner.dirt` scans sample banks (`scan_wav_files_map`,
  `DirtSampleMap`).

## Limits

The sc3-plugins download fetches the Windows 64-bit release only, and the
Extensions paths are always taken under `~/AppData/Local/SuperCollider`.
Automatic installation of missing tools goes through PowerShell and so
works only on Windows; elsewhere install them yourself.

## Running the tests

```
pip install "tidalrunner[test]"
pytest
```