"""Programs bundled with the package, runnable with `python -m pel --sample`."""

FIZZBUZZ_NAME = "fizzbuzz.pel"

FIZZBUZZ = '''make var iter;

iter = 0;

while iter < 100 {
    var output;
    var fizz = "";
    var buzz = "";

    if iter % 3 == 0 {
        fizz = "Fizz";
    }
    if iter % 5 == 0 {
        buzz = "Buzz";
    }

    output = fizz + buzz;
    if output != "" {
        print output;
    } else {
        print iter;
    }

    if iter == 15 {
        var x;
        x;
    }

    iter = iter + 1;
}
'''
