# gleserve

gleserve is a small HTTP/1.1 server library. It serves a directory of
static files and a simple search page. It uses only the standard library.

## Features

- Static files are served from a chosen directory under the `/static/`
  prefix. The content type comes from the last extension of the file name:
  `html`/`htm`, `csv`, `txt`, `jpeg`/`jpg`, `png`, `js`, `css`, `xml`,
  `gif` and `tiff`. Anything else gets `application/octet-stream`.
- Missing files get a `404 Not Found` page. So do requests that would
  leave the static directory, such as `/static/../secret`.
- Every other request gets the search page. When the query string carries
  terms (for example `/query?terms=foo+bar`), the terms are lower-cased and
  split on `+`, and then passed to a search function that you supply. The
  page lists the documents it returns, each with its rank. Documents whose
  names do not start with `http://` are linked under `/static/`.
- Persistent connections. A client may send several requests on one
  socket. The server closes the connection after a request that carries
  `Connection: close`, or when the client goes away.
- Each accepted client is handled on a worker from a fixed-size thread
  pool. The default is 100 threads.

## Modules

| Module                   | What it offers                                                                                  |
|--------------------------|-------------------------------------------------------------------------------------------------|
| `gleserve.httputils`     | `escape_html`, `uri_decode`, `URLParser`, `is_path_safe`, `get_rand_port`, and the socket helpers `read_some`, `write_all`, `connect_to_server` |
| `gleserve.messages`      | `HttpRequest` and `HttpResponse` (`to_bytes` renders a response for the wire)                   |
| `gleserve.filereader`    | `FileReader`, which reads a file below a base directory; it raises `FileNotFoundError`, or `UnsafePathError` for paths that escape the directory |
| `gleserve.connection`    | `HttpConnection`, which reads requests from a socket or file descriptor and writes responses; also `parse_request` |
| `gleserve.threadpool`    | `ThreadPool`, a fixed-size pool of worker threads, usable as a context manager                 |
| `gleserve.serversocket`  | `ServerSocket`, which binds, listens and accepts, and `AcceptedClient`, which describes one accepted connection |
| `gleserve.server`        | `HttpServer`, `SearchResult`, `ServerOptions`, `process_request`, `process_file_request`, `process_query_request`, `content_type_for` and `parse_arguments` |

## Examples

Running a server with your own search function:

```python
from gleserve.server import HttpServer, SearchResult

def search(words):
    if "python" in words:
        return [SearchResult(document_name="notes/python.txt", rank=3)]
    return []

HttpServer(8080, "./www", search).run()
```

`run` binds an IPv6 socket that also accepts IPv4 clients. It serves until
accepting a connection fails. If the listening socket cannot be created,
it raises `OSError`.

Checking command-line style arguments:

```python
from gleserve.server import parse_arguments

options = parse_arguments(["8080", "./www", "index.idx"])
options.port, options.static_dir, options.indices
```

`parse_arguments` takes the arguments without the program name. It raises
`ValueError` with a usage message in any of these cases:

- there are fewer than three arguments;
- the port is not a number from 1024 to 65535;
- the directory is not a directory;
- an index is not a regular file.

HTML escaping and URI decoding:

```python
from gleserve.httputils import escape_html, uri_decode

escape_html('<"Clouds" & \'Nevermind\'>')
# '&lt;&quot;Clouds&quot; &amp; &apos;Nevermind&apos;&gt;'

uri_decode("%74%77%6f")        # 'two'
uri_decode("%20+blah blah")    # '  blah blah'
```

`uri_decode` only decodes escapes whose code lies between 32 and 127.
Malformed or out-of-range escapes are kept as written.

Choosing a content type:

```python
from gleserve.server import content_type_for

content_type_for("index.html")   # 'text/html'
content_type_for("logo.png")     # 'image/png'
content_type_for("archive.bin")  # 'application/octet-stream'
```

Running work on a thread pool:

```python
from gleserve.threadpool import ThreadPool

with ThreadPool(4) as pool:
    for n in range(10):
        pool.dispatch(lambda n=n: print(n))
```

When the pool shuts down, any tasks still waiting in the queue run one
after another before `shutdown` returns. Dispatching to a pool that has
shut down raises `RuntimeError`.

## What it does not do

- There is no installed command. To start a server, call
  `HttpServer(...).run()` from your own code.
- There is no search index. `parse_arguments` only checks that the index
  files exist and are regular files; nothing in the package reads them.
  The search function passed to `HttpServer` has to produce the results.

## Running the tests

The tests use pytest, which comes with the `test` extra:

```
pip install -e ".[test]"
pytest
```