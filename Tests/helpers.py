from CUBELIFE.lattice import Lattice


def make_lattice(size, live_coords=()):
    lattice = Lattice(size)
    for x, y, z in live_coords:
        lattice.set_alive(x, y, z)
    return lattice


def live_coordinates(lattice):
    return {tuple(int(v) for v in lattice.codec.decode(i)) for i in lattice.live_indices()}
