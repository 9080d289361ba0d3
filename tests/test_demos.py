from vmpc import demo_scale, demo_sum


def test_demo_sum():
    assert demo_sum.main() == {0: 35, 1: 35, 2: 35}


def test_demo_scale():
    assert demo_scale.main() == {0: 42, 1: 42}
