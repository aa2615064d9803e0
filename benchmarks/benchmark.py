import random
from pyinstrument import Profiler
from ordered_multimap import OrderedMultimap, by_value

def build_table(rng, size, keys):
    table = OrderedMultimap()
    for _ in range(size):
        table.insert(rng.choice(keys), rng.randrange(1_000_000))
    return table

def workload(rng, size=50_000):
    keys = [f"key{i}" for i in range(500)]
    table = build_table(rng, size, keys)

    for key in keys[:100]:
        table.count(key)
        table.equal_range(key)
        table.update(key, 0)

    table.sort()
    table.sort(by_value, reverse=True)

    other = build_table(rng, size // 10, keys)
    table.merge(other)

    for key in keys[100:200]:
        table.erase(key)
    for key in keys[200:250]:
        table.extract(key)

    handle = table.front()
    while handle:
        handle = table.erase(handle)
        handle = handle.next if handle else handle
    return table.copy()

def benchmark_large():
    rng = random.Random(1)

    profiler = Profiler()
    profiler.start()

    N = 5
    print(f"Starting workload ({N} iterations)...")
    for _ in range(N):
        workload(rng)
    print("Workload finished.")

    profiler.stop()

    profiler.print()

    # Optional: save to HTML
    with open("multimap_profile.html", "w") as f:
        f.write(profiler.output_html())

if __name__ == "__main__":
    benchmark_large()
