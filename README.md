# minicontainer

Building blocks for a small supervised container runtime on Linux, plus
three workloads for experiments with scheduling and memory limits.

The package contains:

- `minicontainer.monitor`: an in-process memory monitor that enforces soft
  and hard RSS limits on registered processes.
- `minicontainer.monitor_ioctl`: the request layout and ioctl numbers for
  talking to a `/dev/container_monitor` memory-monitor device.
- `minicontainer.logbuffer`: a bounded producer/consumer buffer that carries
  container output from pipes to per-container log files.
- `minicontainer.protocol`: the control-plane messages a client and a
  supervisor exchange, with command-line option parsing and socket framing.
- `minicontainer.cpu_hog`, `minicontainer.io_pulse`,
  `minicontainer.memory_hog`: the workloads.

## Requirements

Linux and Python 3.12 or later. No third-party libraries are needed.

```
pip install .
pip install ".[test]"   # for the test suite
pytest
```

## Workloads

```
minicontainer-cpu-hog [seconds]
minicontainer-io-pulse [iterations] [sleep_ms]
minicontainer-memory-hog [chunk_mb] [sleep_ms]
```

- `minicontainer-cpu-hog` spins for the given number of seconds (default 10),
  printing `cpu_hog alive elapsed=... accumulator=...` each time the
  wall-clock second changes and `cpu_hog done ...` at the end. From Python,
  `cpu_hog.burn(duration, out, clock)` does the same and returns the final
  accumulator.
- `minicontainer-io-pulse` truncates `/tmp/io_pulse.out`, then for each
  iteration writes `io_pulse iteration=N`, fsyncs the file, prints a line and
  sleeps (defaults: 20 iterations, 200 ms). `io_pulse.pulse(iterations,
  sleep_ms, output_path, out)` lets you pick the output file. It exits with
  status 1 if the file cannot be written.
- `minicontainer-memory-hog` allocates and fills a chunk of memory (default
  8 MiB) every interval (default 1000 ms) and keeps it, until allocation
  fails. `memory_hog.hog(chunk_mb, sleep_ms, out, max_allocations)` can stop
  after a fixed number of chunks and returns how many it holds.

For `seconds`, `iterations`, `chunk_mb` and io_pulse's `sleep_ms`, anything
that is not a positive whole number falls back to the default. memory_hog's
`sleep_ms` accepts 0; an unparsable value there means a 1 ms pause.

## Memory monitor

```python
from minicontainer.monitor import MemoryMonitor

monitor = MemoryMonitor()
monitor.register(pid, "web", 40 << 20, 64 << 20)
monitor.start()
...
monitor.stop()
```

`MemoryMonitor(rss_reader, killer, interval)` reads each process's resident
set size with `read_rss_bytes` (from `/proc/<pid>/statm`) by default and
kills with SIGKILL by default; both can be replaced. On every `check()`:

- processes whose RSS can no longer be read are dropped;
- the first time a process goes over its soft limit, a warning is logged
  through the `minicontainer.monitor` logger;
- a process over its hard limit is killed, logged and dropped.

`register` raises `ValueError` if the soft limit exceeds the hard limit;
`unregister` raises `LookupError` if no entry matches the pid and container
id. `entries()` returns copies of the tracked `MonitoredEntry` records,
newest first. `start()` runs `check()` every `interval` seconds (default 1)
on a daemon thread; `stop()` ends it and forgets every entry.

## Monitor device requests

`monitor_ioctl.register_with_monitor(device_fd, container_id, pid, soft,
hard)` and `unregister_from_monitor(device_fd, container_id, pid)` issue the
`MONITOR_REGISTER` and `MONITOR_UNREGISTER` ioctls on an already opened
device descriptor and raise `OSError` on failure. `MonitorRequest` packs and
unpacks the native request structure (pid, soft and hard limit, 32-byte
container id); `ioc_write(magic, number, size)` builds write-direction ioctl
numbers.

## Log buffer

`BoundedBuffer(capacity)` (default 16) is a thread-safe FIFO of `LogItem`
chunks. `push` blocks while full, `pop` blocks while empty, and after
`begin_shutdown()` pushes raise `BufferShutdown` while pops keep returning
what is left and raise `BufferShutdown` once it is empty.

- `pump_pipe(fd, buffer, container_id, chunk_size)` reads a descriptor to end
  of file in chunks (default 4096 bytes), pushes them, closes the descriptor
  and returns the number pushed; chunks arriving after shutdown are dropped.
- `drain_to_files(buffer, log_dir)` pops until the buffer is drained and
  appends each chunk to `<log_dir>/<container_id>.log`, returning the number
  of chunks written.

## Control protocol

`ControlRequest` and `ControlResponse` encode to and decode from JSON;
`send_message` and `recv_message` frame them on a stream socket with a 4-byte
big-endian length prefix (`recv_message` returns `None` on a clean close).
`CommandKind` lists the commands (supervisor, start, run, ps, logs, stop) and
`ContainerState` the states (`starting`, `running`, `stopped`, `killed`,
`exited`).

`parse_optional_flags(request, args)` applies `--soft-mib N`, `--hard-mib N`
and `--nice N` (-20..19) and returns a new request; `parse_mib(flag, value)`
converts MiB to bytes. Both raise `UsageError` with a message for missing,
unknown or invalid options, or a soft limit above the hard limit. The
protocol module's defaults are 40 MiB soft and 64 MiB hard
(`DEFAULT_SOFT_LIMIT`, `DEFAULT_HARD_LIMIT`).

## What this package does not do

It has no supervisor process and no command-line client: nothing here
listens on a control socket, starts containers in new namespaces, chroots
them, tracks their lifecycle or answers `start`, `run`, `ps`, `logs` or
`stop` requests. The protocol, log buffer and monitor are the pieces such a
program would use. It also does not provide the `/dev/container_monitor`
device itself; `monitor_ioctl` only talks to one if it exists, and
`MemoryMonitor` does the same limit enforcement from user space.