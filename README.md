# winter

A small web framework: a threaded HTTP server that queues parsed requests, a
router that maps a path and method to a handler, components that are created
once and wired together by annotation, and reflective JSON reading and writing
of classes whose fields are declared with `Field`.

## Running the example application

```
pip install .
winter
```

Options:

- `--host` (default `0.0.0.0`)
- `--port` (default `8080`)
- `--max-connections` (default `10`): how many parsed requests may wait in
  the queue before accepting pauses
- `--log-level` (`TRACE`, `DEBUG`, `INFO`, `WARN`, `ERROR`; default `INFO`)

The command serves the example controller from `winter.example` at
`GET /home`. Its body is JSON such as

```
{"number": 1, "type": "demo", "innerClass": {"x": 2, "y": 3, "c": "ab"}, "values": [1, 2, 3]}
```

and the answer squares `x` and `y`, appends `X2` to `c` and sums `values`.
A body that cannot be read, or has no `innerClass`, is answered with 400.
Stop the server with Ctrl+C.

The same can be started from Python with `winter.app.main(argv)`, or by
building a `winter.app.Winter` from a `winter.app.Configuration` and calling
`run()`; `stop()` ends the loop and `handle_one(timeout)` routes a single
queued request.

## Declaring data classes

Subclass `winter.reflect.Reflect` and declare fields as class attributes.
Every subclass is registered by name when it is defined, so nested objects can
be created during deserialization.

```python
from winter.reflect import Field, Reflect

class Point(Reflect):
    x = Field("int")
    label = Field("string")
    tags = Field("vector<string>")
    parent = Field("Point*", key="parentPoint")   # nullable, JSON key "parentPoint"

p = Point(x=3, label="a")
```

Field types are `short`, `int`, `long`, `float`, `double`, `char`, `bool`,
`byte`, `string`, `vector<T>` and the name of another `Reflect` class. A
trailing `*` makes a field nullable with a default of `None`.
`Reflect.clone(copy_type)`, `winter.reflect.copy_object` and
`winter.reflect.copy_value` copy fields with `CopyType.DEEP` or
`CopyType.SHALLOW`; mismatching field types raise `ReflectionError`.

## JSON

```python
from winter.json_serializer import JsonSerializer
from winter.json_deserializer import JsonDeserializer

text = JsonSerializer().serialize(p)
q = JsonDeserializer().deserialize(text, Point())
```

The serializer writes one field per line in declaration order, floats with six
decimals, `null` for null pointers and `[]` for empty or null lists. Strings
are written and read as they are, without escaping. The deserializer skips
keys with no matching field and raises `JsonDeserializeError` for values that
do not fit their field.

`winter.mapper.Mapper` copies fields between two objects by name;
`FieldMatchType.RELAXED` lower-cases source names first, and
`fail_on_unknown_properties(True)` makes an unmatched field raise
`UnknownPropertyError`.

## Routing requests

```python
from winter.http_constants import HttpCode, HttpMethod
from winter.http_response import HttpResponse
from winter.router import Router

router = Router()
router.register_endpoint("/ping", HttpMethod.GET, lambda request: HttpResponse(HttpCode.OK))
```

`Router.dispatch(request)` returns the response on the calling thread;
`Router.route_request(request)` sends it on the request's connection, running
the handler on a worker thread. A known path with another method gets
405 Method not allowed, an unknown path 404 Not found, and a handler that
raises 500 Internal server error.

`winter.http_request.HttpRequest.parse(data)` turns raw request text into a
request with method, path, query parameters, headers and body.
`winter.http_server.HttpServer` accepts connections on a background thread;
`next_request(timeout)` takes the next parsed request from its queue.

## Components

Subclass `winter.component.Component`. `Component.initialize_components()`
creates one instance of every subclass and fills public attributes annotated
with a component class; `Component.get_component(cls)` returns that instance.

## Logging

`winter.log.get_logger()` returns the shared logger. Messages use `{}`
placeholders:

```python
from winter.log import get_logger

get_logger().info("Received {} requests", 3)
```

## What it does not do

There is no database access or storage: the package has no repositories or
entities, and the example application serves only `/home`. The server reads
one request per connection and closes it after the response; there is no
keep-alive, chunked transfer or HTTPS.

## Tests

```
pip install .[test]
pytest
```