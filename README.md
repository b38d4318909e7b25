# renoderun

Run embedded programs in the Renode emulator.

`renode-run` reads a `[package.metadata.renode]` table from a TOML
manifest. It then writes a Renode script (`emulate.resc`) for the ELF
executable you name and starts `renode` with that script.

Requires Python 3.11 or later. There are no third-party dependencies.

## Installation

    pip install .

## Usage

    renode-run path/to/firmware.elf

Options:

| Option | Environment variable | Meaning |
| --- | --- | --- |
| `--renode PATH` | `RENODE_RUN_RENODE_BIN` | Path to the `renode` binary, if it is not on `$PATH` |
| `-c, --config PATH` | `RENODE_RUN_CONFIG_FILE` | TOML file that holds the configuration |
| `-o, --output DIR` | `RENODE_RUN_OUTPUT_DIR` | Write generated files here instead of a temporary directory |
| `--no-run` | | Generate the script, but do not start Renode |
| `--version` | | Print the version and exit |

### Choosing the configuration file

If `--config` is not given, `cargo metadata` is run first and must
succeed. After that, `Cargo.toml` in the current directory is read.

A manifest that has no `package.metadata.renode` table gives an empty
configuration. An empty configuration fails, because at least one
platform description is required.

### Output files

If no output directory is given, a temporary one is created and then
removed when the command finishes. This means that `--no-run` without
`-o` (and without `resc-file-name`) leaves no files behind.

### Choosing the Renode binary

The Renode binary is chosen in this order:

1. `--renode`
2. the `renode` configuration key, with environment substitution
3. `renode`

Renode is started with the script path as its first argument, followed
by the switches from the command-line keys. It also receives the
configured `environment-variables`.

### Exit status

The command exits with status 1 and prints `error: ...` on standard
error when any of these fail:

- configuration
- substitution
- validation
- file access
- starting Renode

Otherwise it exits 0 after Renode finishes. Renode's own exit status is
not passed on.

### Use as a cargo runner

It can serve as a runner for embedded targets, for example in
`.cargo/config.toml`:

    [target.thumbv7em-none-eabihf]
    runner = "renode-run"

## Configuration

All keys live under `[package.metadata.renode]` and all are optional,
except that at least one platform description is required. Unknown keys
are rejected.

    [package.metadata.renode]
    name = "my-board"
    description = "Firmware running on my board"
    machine-name = "board"
    using-sysbus = true
    platform-descriptions = [
        "@platforms/boards/stm32f4_discovery-kit.repl",
        "<${PROJECT_DIR}/extra.repl",
        '''
        phy3: Network.EthernetPhysicalLayer @ ethernet 3
            Id1: 0x0000
            Id2: 0x0000
        ''',
    ]
    pre-start-commands = ["emulation CreateSwitch \"switch\""]
    reset = "sysbus LoadELF $bin"
    environment-variables = [["PROJECT_DIR", "."]]

### Script keys

| Key | Default |
| --- | --- |
| `name` | `renode-system` |
| `description` | `Renode script generated by renode-run` |
| `machine-name` | `default-machine` |
| `init-commands` | none |
| `variables` | none |
| `platform-description` | none |
| `platform-descriptions` | none |
| `reset` | `sysbus LoadELF $bin` |
| `start` | `start` |
| `pre-start-commands` | none |
| `post-start-commands` | none |

### Renode command-line keys

These keys become Renode switches:

- `plain`
- `port`
- `disable-xwt`
- `hide-monitor`
- `hide-log`
- `hide-analyzers`
- `console`
- `keep-temporary-files`

### Application keys

| Key | Effect |
| --- | --- |
| `resc-file-name` | Path of the script; otherwise `emulate.resc` in the output directory |
| `using-sysbus` | Adds `using sysbus` to the script |
| `omit-start` | Leaves out the start command and the post-start commands |
| `omit-out-dir-path` | Leaves out the `path add @<output dir>` line |
| `environment-variables` | `[name, value]` pairs |
| `renode` | The Renode binary |
| `use-relative-paths` | Accepted, but currently has no effect |
| `disable-envsub` | Accepted, but currently has no effect |

### Platform descriptions

- `@...repl`: a platform file shipped with Renode.
- `path/to/file.repl`: a local file that must exist. It is loaded from
  where it is.
- `<path/to/file.repl`: a local file that must exist. Its contents, with
  environment variables substituted, are written into the output
  directory under the same file name.
- anything else: an inline platform description. It is indented by four
  spaces unless it starts with `using`.

### Environment substitution

Most values support three forms:

- `${NAME}`
- `${NAME-default}`
- `${NAME:-default}`

A variable that is unset and has no default is an error.

The pairs in `environment-variables` are set in the process environment
before substitution takes place.

The executable given on the command line is available in the script as
`$bin`.

## Library use

The pieces can be used on their own:

- `renoderun.envsub.envsub(text)` expands `${...}` expressions.
- `renoderun.config.parse_config(data)` builds a `RenodeRunConfig` from a
  table.
- `renoderun.config.load_manifest_config(path)` reads a `RenodeRunConfig`
  from a manifest.
- `renoderun.types.build_resc_definition(resc, app, bin_path)` validates a
  script configuration into a `RescDefinition`.
- `renoderun.resc_gen.generate_resc(writer, output_dir, app, resc)` writes
  imported platform files and the script.
- `renoderun.cli.renode_command(renode_bin, script_path, cli)` returns
  the argument vector for Renode.
- `renoderun.cli.resolve_renode_bin(opts, app)` picks the Renode binary
  in the order described above.