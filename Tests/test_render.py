import numpy as np
import pytest

from CUBELIFE.exceptions import EmptyRenderQuery
from CUBELIFE.lattice import Lattice
from CUBELIFE.render import INSTANCE_DTYPE, InstanceBuffer, RenderProjection, RenderRecord

from Tests.helpers import make_lattice


def test_one_record_per_live_cell_in_index_order():
    lattice = make_lattice(8, [(1, 1, 1), (-4, 0, 0), (0, 0, 0)])
    records = RenderProjection(np.random.default_rng(0)).project(lattice)
    assert [r.position for r in records] == [lattice.codec.decode(int(i)) for i in lattice.live_indices()]
    for record in records:
        assert isinstance(record, RenderRecord)
        assert record.scale == 1.0
        assert record.color[3] == 1.0
        assert all(0.0 <= c <= 1.0 for c in record.color[:3])


def test_color_blend_follows_chebyshev_distance():
    # Center cell: distance 0, color is the first draw of each pair.
    # Face cell at -L/2: distance 1, color is the second draw.
    lattice = make_lattice(8, [(0, 0, 0), (-4, 2, 1)])
    instances = RenderProjection(np.random.default_rng(42)).project_array(lattice)
    draws = np.random.default_rng(42).random((2, 3, 2))
    by_position = {tuple(row['position']): row['color'] for row in instances}
    assert np.allclose(by_position[(0.0, 0.0, 0.0)][:3], draws[0, :, 0])
    assert np.allclose(by_position[(-4.0, 2.0, 1.0)][:3], draws[1, :, 1])


def test_intermediate_distance_is_a_convex_blend():
    lattice = make_lattice(8, [(2, -1, 0)])
    instances = RenderProjection(np.random.default_rng(7)).project_array(lattice)
    draws = np.random.default_rng(7).random((1, 3, 2))
    expected = 0.5 * draws[0, :, 0] + 0.5 * draws[0, :, 1]
    assert np.allclose(instances['color'][0, :3], expected)


def test_colors_are_redrawn_every_projection():
    lattice = make_lattice(8, [(1, 2, 3)])
    projection = RenderProjection(np.random.default_rng(3))
    first = projection.project_array(lattice)['color']
    second = projection.project_array(lattice)['color']
    assert not np.array_equal(first, second)


def test_empty_lattice_projects_nothing():
    instances = RenderProjection().project_array(Lattice(4))
    assert instances.shape == (0,)
    assert instances.dtype == INSTANCE_DTYPE


def test_publish_replaces_buffer_contents():
    lattice = make_lattice(8, [(0, 0, 0), (1, 0, 0)])
    buffer = InstanceBuffer()
    projection = RenderProjection(np.random.default_rng(1))
    assert projection.publish(lattice, buffer) == 2
    assert buffer.version == 1 and len(buffer) == 2
    lattice.clear()
    lattice.set_alive(3, 3, 3)
    projection.publish(lattice, buffer)
    assert buffer.version == 2
    assert [r.position for r in buffer.records] == [(3.0, 3.0, 3.0)]


def test_publish_without_destination_raises():
    with pytest.raises(EmptyRenderQuery):
        RenderProjection().publish(Lattice(4), None)


def test_alpha_is_opaque_by_default_and_overridable():
    lattice = make_lattice(4, [(0, 0, 0), (1, -1, 0)])
    assert np.all(RenderProjection(np.random.default_rng(0)).project_array(lattice)['color'][:, 3] == 1.0)
    translucent = RenderProjection(np.random.default_rng(0), alpha=0.25).project_array(lattice)
    assert np.allclose(translucent['color'][:, 3], 0.25)
