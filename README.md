# cubraycast

A small first-person raycasting game. It reads a `.cub` scene file that
names four XPM wall textures, gives floor and ceiling colours and draws
a map of walls, then lets you walk through the map in a 900×610 window.

## Installing

    pip install .

The window is drawn with pygame.

## Running

    cubraycast path/to/level.cub

Exactly one argument, the scene file, must be given, and its name must
end in `.cub` (everything from the first dot of the path must be `.cub`).
Texture paths in the scene are taken relative to the current working
directory.

On any problem (wrong number of arguments, bad extension, unreadable
file, invalid identifiers, invalid map, unreadable texture) an `Error`
message is written in red to standard error and the command exits with
status 1.

### Controls

| Key          | Action              |
|--------------|---------------------|
| W / S        | move forward / back |
| A / D        | strafe left / right |
| Left / Right | turn                |
| Esc          | quit                |

Keys act for as long as they are held. Closing the window also quits.

## The scene file

    NO ./textures/north.xpm
    SO ./textures/south.xpm
    WE ./textures/west.xpm
    EA ./textures/east.xpm
    F 220,100,0
    C 225,30,0

    111111
    100101
    101001
    1100N1
    111111

* `NO`, `SO`, `WE`, `EA` name the wall textures. Each file must exist and
  be an XPM image; textures are sampled as 64×64 pixels.
* `F` and `C` give the floor and ceiling colours as three comma-separated
  numbers from 0 to 255.
* Empty lines between identifiers are skipped. The first line that names
  no identifier starts the map.
* The map may hold only `0` (floor), `1` (wall), spaces and exactly one
  of `N`, `S`, `E`, `W`, which marks where the player starts and which way
  they face. The area reachable from the player must be closed off by
  walls, and the map may not contain blank lines, including at the end
  of the file.

## Using it as a library

* `cubraycast.scene.parse_scene(path)` loads and validates a scene file
  and returns a `Scene` (its `elements`, `map`, `floor` and `ceiling`);
  `parse_scene_text(text, base_dir)` does the same from text. Errors are
  raised as `SceneError`. `check_map(rows)` validates map rows on their
  own and returns a `GameMap`.
* `cubraycast.xpm.load_xpm(path)` and `parse_xpm(text)` read an XPM image
  into an `XpmImage` with `width`, `height`, `pixels` and `pixel(x, y)`;
  failures raise `XpmError`. Colours may be `#rrggbb` or names looked up
  with `cubraycast.colornames.lookup_color(name)`.
* `cubraycast.player.camera_for(x, y, direction)` builds a `Camera`
  centred in a map cell; it has `move_up`, `move_down`, `move_left`,
  `move_right`, `rotate_left` and `rotate_right`. `apply_keys(keys,
  camera, grid)` applies a `KeyState` of held `Key`s.
* `cubraycast.raycast.render_walls(frame, camera, grid, textures)` draws
  one frame of textured walls into a `FrameBuffer`; `cast_ray` returns
  the `RayHit` for a single screen column, and `texture_array(image)`
  turns an `XpmImage` into a texture table.
* `cubraycast.game.Game` ties these together: `Game.load(scene)` reads
  the textures, `render_frame()` draws one frame and `run()` opens the
  window. `Game.load(scene, show_minimap=True)` also draws a small map in
  the corner with `draw_minimap`; the `cubraycast` command does not turn
  this on.

## Running the tests

    pip install .[test]
    pytest