# rcscript

An asyncio library for writing scripts that connect to a redstone computer
server over a websocket. A script registers itself by name and description,
receives events from the server, and can call back into the game: read and
write interfaces, query the game time, run commands and write to the server
log.

## Installation

```
pip install rcscript
```

## Writing a script

```python
import asyncio

from rcscript.script import Script


async def on_init(ctx):
    await ctx.info("on_init is called!")


async def on_execute(ctx, args):
    gametime = await ctx.query_gametime()
    await ctx.info(f"gametime = {gametime}")
    return 1


script = Script("hello", server="ws://localhost:37265/")
script.on_init(on_init)
script.on_execute(on_execute)

asyncio.run(script.run())
```

`Script(name="example", description="", server="ws://localhost:37265/")`
holds the script's settings. `on_init` and `on_execute` return the script, so
they can be chained. `Script.url()` gives the address used to connect: the
server followed by `?name=...&description=...`, with both values
percent-encoded by `rcscript.script.url_encode_query`.

`Script.run()` connects and handles events until the server closes the
connection.

- The init callback is called once, when the server initialises the script.
  If an execute callback is set, the script first subscribes to run events.
- The execute callback receives the context and the list of run arguments.
  Its integer return value is reported to the server as the run result. With
  no execute callback the result is `0`.

A callback that raises `rcscript.errors.ServerErrorCode` with an
`rcscript.datatype.ErrorCode` reports that code to the server; any other
exception is reported as `ErrorCode.INTERNAL_ERROR`. A failing init callback
then stops the script with `InitializeFailed`; a failing execute callback
does not stop it.

## The context

Every callback receives a `Context` with these coroutines:

- `read_interface(name)` returns the current value of an interface
- `write_interface(name, value)`
- `query_gametime()` returns the current game time
- `execute_command(command)` returns an `ExecuteCommandResult` with
  `feedback`, `error` and `result`
- `log(message, level)` with a `LogLevel`, and the shortcuts `debug`, `info`,
  `warn`, `error` and `fatal`
- `subscribe_run()`

Events that arrive while a request is waiting for its answer are handled
before the answer is returned.

## Errors

All errors derive from `rcscript.errors.ScriptError`:

- `WebsocketError`: the connection could not be made or failed
- `UnexpectedApiResult`: an API result arrived while no request was pending
- `InvalidServerMessage`: a binary message or text that is neither an event
  nor an API result
- `UnexpectedDisconnect`: the server closed the connection during a request
- `InitializeFailed`: the init callback failed
- `SerializeFailed`: a message could not be encoded, or an API result did not
  have the expected shape
- `ServerErrorCode`: an error code, with the code in its `code` attribute

## Message format

`rcscript.datatype` holds the message types and the functions that build and
parse them: the request builders (`read_interface_request`,
`log_request`, ...), `encode_request`, `parse_event`, `parse_api_result`,
`parse_server_message` and `encode_event_response`.

## Example command

The package ships a small example script that logs when it is initialised and,
each time it is run, logs the current game time and returns `1`:

```
rcscript-hello
rcscript-hello --server ws://localhost:37265/
```

By default it connects to `ws://localhost:37265/`. Press Ctrl-C to stop it.
It exits with status 1 when the script fails.

## Limitations

- Interface change, block update and alarm events are parsed but ignored;
  there are no callbacks for them.
- `Context` can subscribe only to run events. The subscription types for
  interface changes, block updates and alarms can be built and encoded with
  `subscribe_request`, but `Context` has no method that sends them.